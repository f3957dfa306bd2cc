"""
Services Package for the Sticker Conformer.

Each service performs one well-defined step of the conformance pipeline:

- **Format classification (`format_classifier`)** routes an input to the image
  or the transcode path.
- **Duration resolution (`duration_resolver`)** recovers a positive duration
  even when container metadata is missing.
- **Bitrate planning (`bitrate_planner`)** converts a size budget into a
  bitrate.
- **Transcoding (`transcode_engine`)** runs the bounded ffmpeg escalation
  ladder for animations and videos.
- **Image conformance (`image_engine`)** fits still images onto the sticker
  canvas with Pillow.
- **Remote resolution (`remote_resolver`)** turns Tenor links into local files.
- **Staging (`staging_service`)** and **admission (`admission_service`)** keep
  temporary files and concurrent callers apart.
- **Logging (`logging_service`)** writes the error and success file logs.
"""

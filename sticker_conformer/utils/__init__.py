"""
Utilities Package for the Sticker Conformer.

Modules:
    - external_tools.py: Locating and verifying ffmpeg/ffprobe.
    - ffmpeg_utils.py: Running external commands with logging.
    - fallback.py: The ordered "first match" combinator shared by the
      resolvers.
    - format_utils.py: Human-readable sizes and file extension helpers.
"""

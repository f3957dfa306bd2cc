"""
This package contains the core domain models of the Sticker Conformer.

Modules:
    exceptions.py: The error taxonomy surfaced to callers: probe, format, size,
                   remote resolution and encoding failures.
    media.py: `MediaAsset`, the input file owned by one invocation, and
              `ProbeResult`, the condensed ffprobe report, together with the
              ffprobe helpers that produce it.
    models.py: Immutable value objects exchanged between services, such as
               `EncodeParameters` and `RemoteAssetRef`.
"""

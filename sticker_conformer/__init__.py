"""
Sticker Conformer: turns arbitrary media into sticker-ready files.

The package is split the same way throughout:

- `config`: static settings, the conformance policy and user overrides.
- `domain`: data models and the exception hierarchy.
- `services`: the individual engines (classification, duration probing,
  bitrate planning, transcoding, image conformance, Tenor resolution) plus
  staging and admission helpers.
- `pipeline`: the orchestration that routes one request through the services
  and the boundary runner that the CLI drives.
- `utils`: subprocess, formatting and external tool helpers.
"""

__version__ = "0.3.0"

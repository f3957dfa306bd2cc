"""
Configuration Package for the Sticker Conformer.

This package centralizes the static configuration of the application:

- `common.py`: logging format, working directories, external tool locations
  and Tenor API settings, with user overrides loaded from `config.user.yaml`.
- `policy.py`: the conformance policy, i.e. the hard output constraints of the
  sticker profiles and the escalation tiers used to meet them.
"""

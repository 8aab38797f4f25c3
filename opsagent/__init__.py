"""opsagent — operational toolkit for an infrastructure-automation agent.

Subpackages:
  cmd      — run external CLIs, stream their output, map exit statuses
  cloud    — DigitalOcean cluster lookup
  storage  — Spaces download of generated kubeconfigs
"""

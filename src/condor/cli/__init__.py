# topmark:header:start
#
#   project      : Condor
#   file         : __init__.py
#   file_relpath : src/condor/cli/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Click-based command line interface for Condor (``condor`` console script)."""

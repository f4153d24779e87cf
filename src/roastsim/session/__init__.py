"""
Package: session
Description: Session runner and its collaborators.

- params: session parameters from the launch URL
- scheduler: repeating task driving the simulated clock
- simulation: roast state (time, temperature drift, event log)
- scoring: toy score and rounding
- payload: result payload assembly
- runner: SessionRunner tying the above to result delivery
"""

from .params import params_from_query, parse_launch_url
from .runner import SessionRunner

__all__ = [
    "params_from_query",
    "parse_launch_url",
    "SessionRunner",
]

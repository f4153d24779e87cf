"""
Package: roastsim
Description: Coffee roaster training simulator with retrying result delivery.

Runs a timed roast simulation for a learner session described by a launch
URL, scores the run and posts a versioned result payload to the session's
HTTPS callback endpoint.
"""

__version__ = "1.0.0"

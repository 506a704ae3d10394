"""socialauth: link a Twitch and a Twitter account and act on them through a small API."""

__version__ = "0.1.0"

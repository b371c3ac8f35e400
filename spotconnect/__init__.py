"""Protocol, cipher, credential, audio chunk and configuration pieces for a Spotify Connect speaker."""

__version__ = "0.1.0"
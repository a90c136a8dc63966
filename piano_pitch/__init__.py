"""Piano Pitch - real-time pitch detection highlighted on a piano keyboard."""

__version__ = "0.1.0"

"""termicodec: compression and predictive video coding core of TermiView."""

__version__ = '0.3.0'

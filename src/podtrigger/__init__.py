"""podtrigger: activation decisions for cpu/memory based autoscaling triggers."""

__version__ = "0.1.0"

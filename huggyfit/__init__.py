"""huggyfit -- will it fit on the GPU?

Estimates the GPU memory needed to serve a HuggingFace model across
quantization levels, concurrent users, and context lengths, with an
interactive terminal UI on top.
"""

__version__ = "0.1.0"

"""CareerMatch: resume to profile, matching opportunities, and tailored artifacts."""

__version__ = "0.1.0"

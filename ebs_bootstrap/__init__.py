"""
Boot-time EBS volume provisioning: find, attach, partition, format and mount.
"""

__version__ = "1.0.0"

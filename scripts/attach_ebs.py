#!/usr/bin/env python3
"""
attach-ebs

Find, attach, partition, format and mount an EBS volume on this EC2 instance.
Meant to run once per boot, e.g. from cloud-init or a systemd unit.
"""

import os
import sys

# Add the parent directory to the path so we can import the ebs_bootstrap package
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from ebs_bootstrap.cli import main

if __name__ == "__main__":
    sys.exit(main())

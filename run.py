#!/usr/bin/env python3
"""
s3cli - S3 command-line client

Run this script to use s3cli from a checkout without installing it.

Usage:
    python run.py b ls                          # List buckets
    python run.py ps -X PUT -T text/plain b/k   # Presign a PUT URL
    python run.py up bucket/dir/ a.txt b.txt    # Upload files
    python run.py mpu c bucket/key              # Create a multipart upload
    python run.py mpu up bucket/key ID 1 p1 2 p2
    python run.py mpu cl bucket/key ID etag1 etag2
"""

import sys
from s3cli.cli import main

if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python

"""Entry point for: python -m docker_retag"""

import sys

from .cli import main

sys.exit(main())

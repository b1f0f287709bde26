# Copyright (c) 2025 sprouee
import sys

from marksman.main import main

sys.exit(main())

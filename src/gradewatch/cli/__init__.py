# Copyright (c) Syntropy Systems
"""gradewatch command line interface."""

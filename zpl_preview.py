#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Render a ZPL label to a PNG or PDF preview.
"""

import zpl_label_preview.cli


if __name__ == "__main__":
	zpl_label_preview.cli.main()

#!/usr/bin/env python3
from dotsite.cli import main

if __name__ == "__main__":
    main()

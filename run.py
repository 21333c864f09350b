#!/usr/bin/env python3
"""
Export every legacy Dropbox Paper doc in the account to ./docs.

Requires the DBX_OAUTH_TOKEN environment variable.
"""

from paper_dump.main import main

if __name__ == "__main__":
    main()

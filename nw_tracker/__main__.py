import sys

from nw_tracker.cli import main

sys.exit(main())

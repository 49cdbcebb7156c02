import sys

from steelclock.app import main

sys.exit(main())

import sys

from typstmath.app import main

sys.exit(main())

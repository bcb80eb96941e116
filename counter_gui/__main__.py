import sys

from counter_gui.main import main

sys.exit(main())

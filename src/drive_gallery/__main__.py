import sys

from drive_gallery.cli import main

sys.exit(main())

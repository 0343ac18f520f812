import sys

from dnsFlail.generator.main import main

sys.exit(main())

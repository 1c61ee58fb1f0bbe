from agency.server import main

raise SystemExit(main())

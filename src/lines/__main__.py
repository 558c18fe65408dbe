from lines.main import main

raise SystemExit(main())

from lakegrant.cli import main

raise SystemExit(main())

from graphsync.cli import main

raise SystemExit(main())

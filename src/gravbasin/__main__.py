from gravbasin.cli import main

raise SystemExit(main())

from gleamtask.cli import main

raise SystemExit(main())

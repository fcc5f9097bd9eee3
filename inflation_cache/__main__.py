from .update import main

raise SystemExit(main())

from portfolio_tracker.main import main

raise SystemExit(main())

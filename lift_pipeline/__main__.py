from lift_pipeline.tasks import main

raise SystemExit(main())

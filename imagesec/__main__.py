from imagesec.cli import main

raise SystemExit(main())

from fastxdr.compiler.cli import main

raise SystemExit(main())

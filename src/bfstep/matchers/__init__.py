"""Loop-matching strategies, discovered by bfstep.registry."""

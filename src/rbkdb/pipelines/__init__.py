"""
rbkdb.pipelines — end-to-end orchestrators.

    from rbkdb.pipelines import dump

    result = await dump.run(Path("rebrickable.db"), force=True)
"""

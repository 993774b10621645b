"""apigen -- idempotent CRUD scaffolding for flat-file JSON REST APIs.

Generates Express model/controller/route modules for a resource and keeps a
pair of JSON documents (``data_schema.json`` and ``data_store.json``) in sync
with them.

Quick usage::

    from apigen.config import Config
    from apigen.scaffolder import ResourceScaffolder

    config = Config(root="/path/to/project")
    scaffolder = ResourceScaffolder(config)
    report = await scaffolder.scaffold("widget", ["color:string"])
"""

__version__ = "0.3.0"

from habitkernel.config import settings
from habitkernel.kernel.schema import SchemaRegistry

schema_registry = SchemaRegistry(settings.schema_path)


def get_schema_registry() -> SchemaRegistry:
    return schema_registry

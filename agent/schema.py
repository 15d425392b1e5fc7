"""
Static description of the queryable customer database, rendered into prompts.
"""
from dataclasses import dataclass
from typing import Dict, List, Tuple


# Store-native type names mapped to the vocabulary used in prompts
TYPE_MAP: Dict[str, str] = {
    'Int': 'integer',
    'String': 'string',
    'Boolean': 'boolean',
    'DateTime': 'date',
    'Float': 'decimal',
    'Decimal': 'decimal'
}


@dataclass(frozen=True)
class ColumnDescriptor:
    name: str
    type: str

    @property
    def prompt_type(self) -> str:
        return TYPE_MAP.get(self.type, 'string')


@dataclass(frozen=True)
class RelationDescriptor:
    field: str
    target: str
    is_list: bool


@dataclass(frozen=True)
class TableDescriptor:
    name: str
    columns: Tuple[ColumnDescriptor, ...]
    relations: Tuple[RelationDescriptor, ...] = ()


class SchemaDescriptor:
    def __init__(self, tables: List[TableDescriptor]):
        self.tables = list(tables)

    def describe(self) -> str:
        """
        Render tables, columns and relationships as prompt text.

        Ordering follows declaration order so the same schema always yields
        the same text.
        """
        schema = ""

        for table in self.tables:
            schema += f"Table: {table.name}\n"
            column_strings = [f"{col.name} ({col.prompt_type})" for col in table.columns]
            schema += f"Columns: {', '.join(column_strings)}\n\n"

        schema += "Relationships:\n"

        for table in self.tables:
            source = table.name.lower()
            for rel in table.relations:
                target = rel.target.lower()
                if rel.is_list:
                    schema += f"- {source} has many {target} (one-to-many relationship via {rel.field})\n"
                else:
                    schema += f"- {source} belongs to {target} (many-to-one relationship via {rel.field})\n"

        return schema


CUSTOMER_SCHEMA = SchemaDescriptor([
    TableDescriptor(
        name="customer",
        columns=(
            ColumnDescriptor("id", "Int"),
            ColumnDescriptor("name", "String"),
            ColumnDescriptor("email", "String"),
        ),
        relations=(
            RelationDescriptor("address", "address", is_list=True),
            RelationDescriptor("orders", "orders", is_list=True),
        ),
    ),
    TableDescriptor(
        name="address",
        columns=(
            ColumnDescriptor("id", "Int"),
            ColumnDescriptor("customer_id", "Int"),
            ColumnDescriptor("type", "String"),
            ColumnDescriptor("street", "String"),
            ColumnDescriptor("city", "String"),
            ColumnDescriptor("zip", "String"),
            ColumnDescriptor("country", "String"),
        ),
        relations=(
            RelationDescriptor("customer", "customer", is_list=False),
        ),
    ),
    TableDescriptor(
        name="orders",
        columns=(
            ColumnDescriptor("id", "Int"),
            ColumnDescriptor("customer_id", "Int"),
            ColumnDescriptor("order_date", "DateTime"),
            ColumnDescriptor("total_amount", "Decimal"),
        ),
        relations=(
            RelationDescriptor("customer", "customer", is_list=False),
        ),
    ),
])

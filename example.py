"""Example usage of the catalog_tables library."""

from catalog_tables import ColumnDescriptor, ComparisonMode, FilterParser, Table

# Describe the columns of a small galaxy catalog
descriptors = [
    ColumnDescriptor(name="RA", declared_type="float", id="col1", unit="deg"),
    ColumnDescriptor(name="Dec", declared_type="float", id="col2", unit="deg"),
    ColumnDescriptor(name="Name", declared_type="char", id="col3", array_size="*"),
    ColumnDescriptor(name="RVel", declared_type="int", id="col4", unit="km/s"),
    ColumnDescriptor(name="e_RVel", declared_type="short", id="col5", unit="km/s"),
    ColumnDescriptor(name="R", declared_type="float", id="col6", unit="Mpc"),
]

# One list of field texts per row, as a VOTable TABLEDATA section holds them
rows = [
    ["010.68", "+41.27", "N  224", "-297", "5", "0.7"],
    ["287.43", "-63.85", "N 6744", "839", "6", "10.4"],
    ["023.48", "+30.66", "N  598", "-182", "3", "0.7"],
]

table = Table.from_rows(descriptors, rows)
print(table.info())

# Narrow a view with a numeric range, then sort what is left
view = table.view()
view.numeric_filter("RA", ComparisonMode.RANGE_INCLUSIVE, 10, 300)
view.sort_by_column("RA", ascending=False)
print("\nRA descending:", view.values("RA"))
print("Names:", view.values("Name"))

# The same selection written as a filter expression
expression = FilterParser().parse('RA between 10 and 300 and not Name contains "6744"')
print("\nMatching rows:", expression.execute(table))

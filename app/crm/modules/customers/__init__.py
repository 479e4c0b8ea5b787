"""
Customers module.

- Customers with one or more mailing addresses
- Exactly one primary address per customer, swapped atomically
- JSON routes under /customers
"""

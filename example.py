"""Example usage of the typed_records library."""

from datetime import date
from decimal import Decimal

from typed_records import RecordStore

# Define record types using the schema DSL
schema = """
Account prefix "001" {
    Name: string,
    AnnualRevenue: decimal,
    CloseDate: date,
}
Contact prefix "003" {
    LastName: string,
    AccountId: id,
}
"""

store = RecordStore.from_schema(schema)

accounts = [
    store.new_record("Account", Name="Acme", AnnualRevenue=Decimal("1200"), CloseDate=date(2024, 3, 31)),
    store.new_record("Account", Name="Globex", AnnualRevenue=Decimal("300")),
    store.new_record("Account", Name="Initech", CloseDate=date(2023, 12, 1)),
]

print("Inserting Account records...")
store.insert_many(accounts)
for account in accounts:
    print(f"  Created: {account.id} {account.get('Name')}")

store.insert_one(store.new_record("Contact", LastName="Smith", AccountId=accounts[0].id))

print("\nAccounts closing after 2024-01-01:")
for account in store.query("Account").greater_than("CloseDate", date(2024, 1, 1)):
    print(f"  {account.get('Name')} ({account.get('CloseDate')})")

print("\nAccounts named Acme or Globex with revenue >= 500:")
result = store.query("Account").filter("Name", ["Acme", "Globex"]).greater_or_equal("AnnualRevenue", 500)
print(f"  {result.collection_of('Name')}")

print("\nContacts by account:")
for account_id, contact in store.query("Contact").map_by_id("AccountId").items():
    print(f"  {account_id}: {contact.get('LastName')}")

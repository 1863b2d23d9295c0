"""Wire protocol: transaction structs, receipts and asset views."""

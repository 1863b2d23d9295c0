"""Non-fungible asset marketplace: registry, listings, auctions and fees."""

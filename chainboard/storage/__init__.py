"""In-memory storage: entities, unique indexes, records and relations."""
"""Stock service: domain, repositories, query builder, SQLite store and stock queries."""
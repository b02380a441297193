"""GitHub data models and an in-memory fake GitHub client."""
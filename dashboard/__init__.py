"""Terminal-Dashboard: Tabellenzeilen und Rich-Tabellen."""

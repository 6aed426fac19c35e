"""HTML rendering: node cards, full pages and the bundled browser assets."""

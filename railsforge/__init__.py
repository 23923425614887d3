"""railsforge -- configure a new Rails app with ViteJS, Tailwind CSS and Devise."""

__version__ = "0.1.0"

"""hostsetup - building blocks for post-installation machine setup."""

# Add-on demo scripts
#
# Each module here is a small standalone script that connects to one managed
# add-on (Redis-protocol KV store, S3 bucket, MySQL/PostgreSQL database),
# runs a few direct client calls and prints the results.
#
# Run any of them with `python -m addons.<module>` or the matching console script.

# CreaseScore Gunicorn Configuration
#
# Each request loads the match snapshot, mutates it and writes it back with
# last-write-wins semantics. Scoring assumes a single writer per match, so
# keep one worker.
#
#   gunicorn -c gunicorn.conf.py "app:create_app()"

bind = "127.0.0.1:5000"
workers = 1
threads = 1
timeout = 120

"""
Script to create a user from the command line.
"""
import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from cryptotracker.core.auth import hash_password
from cryptotracker.core.database import SessionLocal, init_db
from cryptotracker.core.errors import ConflictError
from cryptotracker.services import credentials


def create_user(username: str, password: str):
    """Create a user, reporting if the username is taken."""
    init_db()
    db = SessionLocal()
    try:
        user_id = credentials.create_user(db, username, hash_password(password))
        print(f"✅ User created successfully!")
        print(f"   Username: {username}")
        print(f"   ID: {user_id}")
    except ConflictError:
        print(f"User {username} already exists!")
    finally:
        db.close()


if __name__ == "__main__":
    import argparse
    parser = argparse.ArgumentParser(description='Create user')
    parser.add_argument('--username', required=True, help='Username')
    parser.add_argument('--password', required=True, help='Password')

    args = parser.parse_args()
    create_user(args.username, args.password)

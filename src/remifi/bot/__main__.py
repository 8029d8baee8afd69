"""Entry point for running bot as module: python -m remifi.bot"""

# Load .env file before importing anything else
from dotenv import load_dotenv
load_dotenv()

from remifi.bot.bot import main

if __name__ == "__main__":
    main()

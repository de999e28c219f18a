"""Entry point for claude-chat-viewer."""

from chat_viewer.cli import main

if __name__ == "__main__":
    main()

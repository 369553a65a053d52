"""mecab-channel 入口点。

支持: python -m mecab_channel
"""

from .app import main

if __name__ == "__main__":
    main()

"""
Calendar Diary 用戶端：
    api.py    - CalendarServer 的 HTTP 包裝（httpx）
    state.py  - token / locale / trialCount 的本地狀態與註冊表單驗證
    cli.py    - 命令列介面
"""

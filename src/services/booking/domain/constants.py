from datetime import timedelta

# 予約作成から決済までの猶予。超過した INITIATED の予約は期限切れとしてキャンセルする
BOOKING_PAYMENT_WINDOW = timedelta(minutes=5)

# 成功した決済結果を冪等性キーで保持する期間
IDEMPOTENCY_RETENTION = timedelta(hours=24)

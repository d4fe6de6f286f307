"""Chat texts and keyboards sent by the bot."""

from sketch_time.models.streak import UserStats

WELCOME_MESSAGE = """🎨 Welcome to Sketch-Time!

This bot helps you track your daily sketching habit and build streaks!

📸 Send me your daily sketches (PNG/JPEG images)
📊 Use the Mini-App to track your progress and streaks
⏱️ Built-in timer to help you focus on your art

To get started, just send me a sketch or open the Mini-App!"""

DOCUMENT_HINT = "Please send your sketches as photos (PNG/JPEG) rather than documents for better tracking!"

UPLOAD_FAILED = "Sorry, there was an error saving your sketch. Please try again."

TIMER_COMPLETE = "⏰ Time's up! Great work on your sketch session. Your session for today is complete 🎨"

SESSION_DONE = "Session marked as complete! Great work! 🎨"

SKETCH_SAVED = "Sketch uploaded! Your session for today is complete 🎨"

NO_UPLOAD_YET = "You must upload a sketch today before marking the session as complete!"


def upload_reply(stats: UserStats) -> str:
    cheer = "🔥" if stats.current_streak > 0 else "💪"
    return (
        "🎨 Great sketch! Added to your collection!\n\n"
        "📊 Your Stats:\n"
        f"🔥 Current Streak: {stats.current_streak} days\n"
        f"🏆 Longest Streak: {stats.longest_streak} days\n"
        f"📈 Total Sketches: {stats.total_uploads}\n\n"
        f"Keep it up! {cheer}"
    )


def web_app_keyboard(text: str, url: str) -> dict:
    return {"inline_keyboard": [[{"text": text, "web_app": {"url": url}}]]}

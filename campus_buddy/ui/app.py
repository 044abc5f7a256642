# campus_buddy/ui/app.py
import streamlit as st
import requests
from datetime import datetime

from campus_buddy.config import API_BASE, CATEGORIES
from campus_buddy.prompts.system_prompts import CHAT_APOLOGY, CHAT_GREETING

st.set_page_config(page_title="Campus Buddy", layout="centered")


def now_label() -> str:
    return datetime.now().strftime("%H:%M")


def format_time(timestamp):
    if not timestamp:
        return ""
    try:
        return datetime.fromisoformat(timestamp.replace("Z", "+00:00")).strftime("%d %b %Y, %H:%M")
    except ValueError:
        return timestamp[:16]


def auth_headers():
    user_id = st.session_state.get("user_id", "").strip()
    return {"X-User-Id": user_id} if user_id else {}


# ============================================================
# SIDEBAR: IDENTITY + NAVIGATION
# ============================================================

st.sidebar.header("Campus Buddy")

st.session_state["user_id"] = st.sidebar.text_input(
    "Signed-in user id",
    value=st.session_state.get("user_id", ""),
)

profile = None

if st.session_state["user_id"]:
    try:
        response = requests.get(f"{API_BASE}/profiles/{st.session_state['user_id']}")
        if response.status_code == 200:
            profile = response.json()
            st.sidebar.success(f"{profile.get('full_name') or profile['user_id']} ({profile['user_type']})")
        else:
            st.sidebar.warning("No profile found for this user")
    except Exception as e:
        st.sidebar.error(f"API Error: {str(e)}")

pages = ["Campus Buddy Chat", "SyncSpot"]
if profile and profile.get("user_type") == "faculty":
    pages.append("Faculty Dashboard")

page = st.sidebar.radio("Go to", pages)


# ============================================================
# STUDENT CHAT
# ============================================================

def render_chat():

    st.title("Campus Buddy")

    if "messages" not in st.session_state:
        st.session_state["messages"] = [
            {"role": "assistant", "text": CHAT_GREETING, "time": now_label()}
        ]

    for message in st.session_state["messages"]:
        with st.chat_message(message["role"]):
            st.markdown(message["text"])
            st.caption(message["time"])

    text = st.chat_input("Ask about departments, faculty, events...")

    if not text:
        return

    st.session_state["messages"].append({"role": "user", "text": text, "time": now_label()})

    with st.spinner("Campus Buddy is typing..."):
        try:
            response = requests.post(
                f"{API_BASE}/ai-chat",
                json={"message": text},
                headers=auth_headers(),
                timeout=60,
            )
            data = response.json()
            reply = data.get("response") or CHAT_APOLOGY
            if data.get("redirect") == "syncspot":
                st.toast("Your question is on SyncSpot")
        except Exception:
            reply = CHAT_APOLOGY

    st.session_state["messages"].append({"role": "assistant", "text": reply, "time": now_label()})
    st.rerun()


# ============================================================
# SYNCSPOT
# ============================================================

def render_syncspot():

    st.title("SyncSpot")
    st.write("Community Q&A - Students helping students")
    st.caption("Questions that couldn't be answered by Campus Buddy appear here for peer collaboration")

    try:
        response = requests.get(f"{API_BASE}/syncspot/questions")
    except Exception as e:
        st.error(f"API Error: {str(e)}")
        return

    if response.status_code != 200:
        st.error("Failed to load questions")
        return

    questions = response.json()["questions"]

    if not questions:
        st.info("Questions that Campus Buddy can't answer will appear here for the community to help with.")
        return

    for question in questions:

        with st.container(border=True):

            st.caption(format_time(question.get("created_at")))
            st.markdown(f"**{question['question']}**")

            if question.get("user_id") and question["user_id"] == st.session_state.get("user_id"):
                if st.button("Delete", key=f"delete_{question['id']}"):
                    del_response = requests.delete(
                        f"{API_BASE}/syncspot/questions/{question['id']}",
                        headers=auth_headers(),
                    )
                    if del_response.status_code == 200:
                        st.success("Question deleted successfully")
                        st.rerun()
                    else:
                        st.error("Failed to delete question")

            answers = question.get("answers", [])
            if answers:
                st.write(f"Community Answers ({len(answers)})")
                for answer in answers:
                    st.markdown(f"- {answer['answer']}  \n  _{format_time(answer.get('created_at'))}_")

            answer_text = st.text_area(
                "Your answer",
                placeholder="Share your answer to help the community...",
                key=f"answer_{question['id']}",
            )

            if st.button("Send", key=f"send_{question['id']}", disabled=not answer_text.strip()):
                post_response = requests.post(
                    f"{API_BASE}/syncspot/questions/{question['id']}/answers",
                    json={"answer": answer_text},
                    headers=auth_headers(),
                )
                if post_response.status_code == 201:
                    st.success("Your answer has been submitted!")
                    st.rerun()
                else:
                    st.error(f"Failed to submit answer: {post_response.json().get('detail', 'Unknown error')}")


# ============================================================
# FACULTY DASHBOARD
# ============================================================

def render_dashboard():

    st.title("Faculty Dashboard")
    st.write(f"Welcome, **{profile.get('full_name') or profile['user_id']}**. Manage college data to train the AI model.")

    st.header("Add College Data")

    with st.form("add_college_data", clear_on_submit=True):
        title = st.text_input("Title *", placeholder="e.g., Computer Lab Location")
        category = st.selectbox("Category *", CATEGORIES)
        content = st.text_area("Content *")
        tags = st.text_input("Tags", placeholder="comma, separated, tags")
        submitted = st.form_submit_button("Save", type="primary")

    if submitted:
        if not title.strip() or not content.strip():
            st.error("Please fill in all required fields.")
        else:
            response = requests.post(
                f"{API_BASE}/college-data",
                json={"title": title, "category": category, "content": content, "tags": tags},
                headers=auth_headers(),
            )
            if response.status_code == 201:
                st.success("College data added successfully!")
            else:
                st.error(f"Failed to add college data: {response.json().get('detail', 'Unknown error')}")

    st.divider()
    st.header("Existing Data")

    try:
        response = requests.get(f"{API_BASE}/college-data")
    except Exception as e:
        st.error(f"API Error: {str(e)}")
        return

    if response.status_code != 200:
        st.error("Failed to load college data.")
        return

    data = response.json()
    st.metric("Total Records", data["total_records"])

    for record in data["records"]:

        with st.expander(f"{record['title']} ({record['category']})"):

            st.write(record["content"])

            if record.get("tags"):
                st.caption(", ".join(record["tags"]))

            if record.get("file_name"):
                st.info(f"Attached: {record['file_name']} ({record.get('file_type') or 'unknown type'})")

            upload = st.file_uploader(
                "Attach document",
                key=f"file_{record['id']}",
                type=["txt", "pdf", "docx", "doc", "xlsx", "xls", "pptx", "ppt", "png", "jpg", "jpeg", "webp", "gif"],
            )

            if upload and st.button("Process document", key=f"process_{record['id']}"):
                with st.spinner("Uploading and processing document..."):
                    files = {"file": (upload.name, upload.getvalue(), upload.type or "application/octet-stream")}
                    up_response = requests.post(
                        f"{API_BASE}/college-data/{record['id']}/document",
                        files=files,
                        headers=auth_headers(),
                        timeout=300,
                    )
                if up_response.status_code == 200:
                    result = up_response.json()
                    st.success(f"{result['message']} ({result['parsed_length']} characters)")
                    st.rerun()
                else:
                    body = up_response.json()
                    st.error(f"Processing failed: {body.get('detail') or body.get('error', 'Unknown error')}")

            if st.button("Delete", key=f"delete_{record['id']}"):
                del_response = requests.delete(
                    f"{API_BASE}/college-data/{record['id']}",
                    headers=auth_headers(),
                )
                if del_response.status_code == 200:
                    st.success("Data deleted successfully!")
                    st.rerun()
                else:
                    st.error("Failed to delete data.")


if page == "Campus Buddy Chat":
    render_chat()
elif page == "SyncSpot":
    render_syncspot()
else:
    render_dashboard()

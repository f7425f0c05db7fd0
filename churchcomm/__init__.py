"""ChurchComm outreach scheduler"""
